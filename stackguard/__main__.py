from stackguard.main import main

main()

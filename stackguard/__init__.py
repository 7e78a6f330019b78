"""Health verification and auto-recovery for a proxied model-serving compose stack."""

"""Users, customer profiles and B2B accounts with contract pricing."""

"""acme-account tests"""

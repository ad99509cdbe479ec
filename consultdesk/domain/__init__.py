"""Domain packages: billing, analytics, companion"""

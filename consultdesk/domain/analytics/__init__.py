"""Analytics domain - Visitor/event tracking in the graph store"""

"""Companion domain - Chat relay to the companion backend"""

"""Outbound integrations: Google Calendar and follow-up webhooks"""

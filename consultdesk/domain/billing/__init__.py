"""Billing domain - Stripe checkout, subscriptions, portal and webhooks"""

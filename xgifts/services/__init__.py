"""Business logic services.

Services contain all business logic and are called by routes.
Dependencies (stores, clients, locks, clocks) are passed in explicitly.
"""

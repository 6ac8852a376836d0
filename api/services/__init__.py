"""
Services package
Business logic for authentication, password recovery, users and notifications
"""

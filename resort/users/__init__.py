"""User profile management"""

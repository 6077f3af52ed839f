"""Authentication: local accounts, session tokens, password reset and Google sign-in"""

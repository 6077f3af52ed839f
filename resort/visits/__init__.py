"""Visit counter analytics"""

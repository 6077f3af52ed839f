"""Gartang Gali Resort booking backend"""

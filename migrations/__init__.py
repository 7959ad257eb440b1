"""
Migrations Package - One-off data import scripts
"""

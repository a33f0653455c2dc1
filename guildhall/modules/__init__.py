"""
Guildhall domain modules: users, characters, teams, events and suggestions,
plus the shared admission gate.
"""

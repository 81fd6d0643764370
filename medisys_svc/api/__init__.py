"""
HTTP layer of the MediSys patient service.
"""

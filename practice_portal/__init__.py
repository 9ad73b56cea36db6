"""
IWIL Practice Portal

FastAPI backend for the practice management application: staff
authentication, registration and bearer-token sessions.
"""

__version__ = "1.0.0"

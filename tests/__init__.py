"""
Test suite for the IWIL Practice Portal.

Contains unit tests for the auth core and integration tests for the HTTP API.
"""

"""
WeDeploy CLI Core

Configuration, host parsing, error messages and local workspace helpers.
"""

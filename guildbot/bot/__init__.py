"""
Bot client, configuration and keep-alive server.
"""

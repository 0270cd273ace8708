"""
Test-runner integration for pagechain (pytest plugin fixtures).
"""

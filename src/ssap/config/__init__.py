"""
Loads layered configuration files and applies them to modules.
"""

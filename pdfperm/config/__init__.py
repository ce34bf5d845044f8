"""
Configuration of the permission tool, typically read from a YAML file.
"""

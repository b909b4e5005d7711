"""
CLI subcommands for depfinder.
"""

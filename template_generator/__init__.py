"""
Printable grid template generator.

Contains:
- renderer.py: Dot / line / graph grid painting onto a Pillow image
- utils.py: Units, template configuration and exit codes
- export.py: PNG encoding and saving
- generate_template.py: Command-line entry point
"""

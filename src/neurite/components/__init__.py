"""
Reusable model components.

- neurons: lowered-cell back ends for cell groups
"""

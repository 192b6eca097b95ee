"""
Static balancing policy: label sets, difference ratios and the bundled
``default.yaml`` configuration.
"""

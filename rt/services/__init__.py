"""Application services for the release tool.

Services implement the release workflow, coordinating between the domain
layer (core/) and infrastructure (platform/, git/).
"""

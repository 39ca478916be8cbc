"""
Runtime building blocks shared by the catalog and the scheduling engine.
"""

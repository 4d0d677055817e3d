"""myawesomelist: awesome-list aggregation with semantic project search"""

__version__ = "1.0.0"

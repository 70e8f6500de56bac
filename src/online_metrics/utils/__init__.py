from .display import format_tree, format_value
from .registry import Registry

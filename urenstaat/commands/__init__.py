from .template import template
from .log import log
from .month import month
from .export import export

__all__ = ['template', 'log', 'month', 'export']

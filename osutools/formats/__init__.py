"""
Format registry : which function loads or dumps which kind of file
"""
from .enum import Format
from .guess import guess_format
from .loaders_and_dumpers import DUMPERS, LOADERS

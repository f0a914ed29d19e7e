from enum import Enum


class Format(str, Enum):
    OSU = "osu"
    OSB = "osb"

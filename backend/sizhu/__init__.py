"""四柱排盤

以節氣交節時刻為界推算八字年、月、日、時四柱。
"""

__version__ = "0.1.0"

"""
Discipline Tracker - 一日の計画と自己モニタリング
"""
__version__ = "1.0.0"

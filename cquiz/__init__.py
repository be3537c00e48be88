"""
C programming revision quiz service
"""

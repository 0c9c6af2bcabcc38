"""
MCP Sampling Router
在多个可替换的后端之上提供统一的采样接口，并按客户端偏好选择模型
"""

__version__ = "0.1.0"

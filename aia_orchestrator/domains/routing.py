"""
Routing categories used to match prompts to provider strengths.
"""
from enum import Enum


class RoutingCategory(str, Enum):
    CODING = "coding"
    CREATIVE = "creative"
    ANALYSIS = "analysis"
    MATH = "math"
    RESEARCH = "research"
    CONVERSATION = "conversation"
    TASK_MANAGEMENT = "task-management"
    SUMMARIZATION = "summarization"

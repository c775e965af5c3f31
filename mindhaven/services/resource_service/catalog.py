"""Self-help resource suggestions by problem type and risk level."""
import copy
from typing import Any, Dict, List

from mindhaven.shared.models import RiskLevel

RESOURCE_CATALOG: Dict[str, Dict[str, List[Dict[str, str]]]] = {
    "anxiety": {
        "videos": [
            {
                "title": "Anxiety Management Techniques",
                "url": "https://www.youtube.com/watch?v=tybOi4hjZFQ",
                "description": "Learn practical techniques to manage anxiety",
            },
            {
                "title": "Breathing Exercises for Anxiety",
                "url": "https://www.youtube.com/watch?v=Luxo9jJM0Tc",
                "description": "Simple breathing exercises to reduce anxiety",
            },
        ],
        "books": [
            {
                "title": "The Anxiety and Worry Workbook",
                "author": "David A. Clark",
                "url": "https://www.amazon.com/Anxiety-Worry-Workbook-Cognitive-Behavioral/dp/1462546021",
                "description": "CBT-based strategies for managing anxiety",
            },
        ],
        "articles": [
            {
                "title": "Understanding Anxiety Disorders",
                "url": "https://www.nimh.nih.gov/health/topics/anxiety-disorders",
                "description": "Comprehensive guide to anxiety disorders",
            },
        ],
    },
    "depression": {
        "videos": [
            {
                "title": "Overcoming Depression",
                "url": "https://www.youtube.com/watch?v=XiCrniLQGYc",
                "description": "Understanding and overcoming depression",
            },
            {
                "title": "Depression: What You Need to Know",
                "url": "https://www.youtube.com/watch?v=z-IR48Mb3W0",
                "description": "Educational video about depression",
            },
        ],
        "books": [
            {
                "title": "Feeling Good: The New Mood Therapy",
                "author": "David D. Burns",
                "url": "https://www.amazon.com/Feeling-Good-New-Mood-Therapy/dp/0380810336",
                "description": "Classic book on cognitive behavioral therapy for depression",
            },
        ],
        "articles": [
            {
                "title": "Depression Basics",
                "url": "https://www.nimh.nih.gov/health/topics/depression",
                "description": "Understanding depression and treatment options",
            },
        ],
    },
    "stress": {
        "videos": [
            {
                "title": "Stress Management Techniques",
                "url": "https://www.youtube.com/watch?v=PDBJLGckt7E",
                "description": "Effective stress management strategies",
            },
            {
                "title": "Mindfulness for Stress Relief",
                "url": "https://www.youtube.com/watch?v=inpok4MKVLM",
                "description": "Using mindfulness to manage stress",
            },
        ],
        "books": [
            {
                "title": "The Stress-Free Life",
                "author": "Fred Luskin",
                "url": "https://www.amazon.com/Stress-Free-Life-Powerful-Techniques-Prevent/dp/0807071005",
                "description": "Practical techniques for stress management",
            },
        ],
        "articles": [
            {
                "title": "Stress Management",
                "url": "https://www.mayoclinic.org/healthy-lifestyle/stress-management/basics/stress-basics/hlv-20049495",
                "description": "Comprehensive guide to managing stress",
            },
        ],
    },
    "general": {
        "videos": [
            {
                "title": "Mental Health Awareness",
                "url": "https://www.youtube.com/watch?v=DxIDKZHW3-E",
                "description": "General mental health awareness and tips",
            },
        ],
        "books": [
            {
                "title": "The Mental Health Handbook",
                "author": "Various Authors",
                "url": "https://www.amazon.com/Mental-Health-Handbook-Cognitive-Behavioral/dp/1684034685",
                "description": "Comprehensive mental health resource",
            },
        ],
        "articles": [
            {
                "title": "Mental Health Information",
                "url": "https://www.nimh.nih.gov/health/topics",
                "description": "Comprehensive mental health information",
            },
        ],
    },
}

CRISIS_HOTLINES: List[Dict[str, str]] = [
    {
        "title": "Crisis Text Line",
        "description": "Text HOME to 741741 for free, 24/7 crisis support",
        "type": "hotline",
    },
    {
        "title": "National Suicide Prevention Lifeline",
        "description": "Call 988 for immediate help",
        "type": "hotline",
    },
]

_ESCALATED_LEVELS = (RiskLevel.HIGH.value, RiskLevel.CRISIS.value)


def suggest_resources(problem_type: str, risk_level: str) -> Dict[str, Any]:
    """Resources for problem_type; unknown types get the general set.

    High and crisis risk levels add a "crisis" list of hotlines.
    """
    resources: Dict[str, Any] = copy.deepcopy(
        RESOURCE_CATALOG.get(problem_type or "", RESOURCE_CATALOG["general"])
    )
    if risk_level in _ESCALATED_LEVELS:
        resources["crisis"] = copy.deepcopy(CRISIS_HOTLINES)
    return resources

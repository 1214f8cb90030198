# backend/sparkvibe/domain/capsules/tables.py
"""
Static content for the table-driven capsule generator.

Keys are normalized mood labels. Every entry carries the full bundle so a
table capsule is shape-identical to an LLM one.
"""
from __future__ import annotations

from typing import Dict, Any

DEFAULT_MOOD = "curious"
DEFAULT_CATEGORY = "general"
DEFAULT_GREETING = "Hey there! Ready for a little adventure?"

MOOD_CONTENT: Dict[str, Dict[str, Any]] = {
    "happy": {
        "title": "✨ Sunshine Adventure",
        "prompt": "Your positive energy is contagious! Choose how to spread the joy today:",
        "options": ["Send a cheerful message to a friend", "Do a happy dance and share it"],
        "mood_boost": "Your happiness is lighting up the world! Keep shining! 🌟",
        "habit_nudge": "Smile at 3 people today and watch the magic happen!",
        "difficulty": "easy",
        "estimated_time": "5 min",
    },
    "chill": {
        "title": "🌊 Zen Moment",
        "prompt": "Time to embrace the calm vibes. What sounds most relaxing?",
        "options": ["Take 5 deep breaths and meditate", "Listen to your favorite chill music"],
        "mood_boost": "Your chill energy brings peace to those around you 🧘",
        "habit_nudge": "Stretch for 2 minutes and feel the tension melt away",
        "difficulty": "easy",
        "estimated_time": "5 min",
    },
    "curious": {
        "title": "🔍 Discovery Quest",
        "prompt": "Your curiosity is your superpower! What sparks your interest?",
        "options": ["Learn one fascinating fact today", "Ask someone an interesting question"],
        "mood_boost": "Your curious mind makes the world more interesting! 🚀",
        "habit_nudge": "Read about something completely new for 5 minutes",
        "difficulty": "medium",
        "estimated_time": "10 min",
    },
    "energetic": {
        "title": "⚡ Power Surge",
        "prompt": "You're buzzing with energy! Where do you want to channel it?",
        "options": ["Do a 10-minute workout burst", "Tackle the task you've been putting off"],
        "mood_boost": "Your energy can move mountains today! 💪",
        "habit_nudge": "Take the stairs every chance you get today",
        "difficulty": "hard",
        "estimated_time": "15 min",
    },
    "anxious": {
        "title": "🌿 Calm Harbor",
        "prompt": "Let's slow things down together. Which feels most doable right now?",
        "options": ["Try box breathing for one minute", "Write down three things you can control"],
        "mood_boost": "You've handled hard moments before, and you can handle this one 💙",
        "habit_nudge": "Step outside for two minutes of fresh air",
        "difficulty": "easy",
        "estimated_time": "5 min",
    },
    "sad": {
        "title": "🌈 Gentle Lift",
        "prompt": "Be kind to yourself today. Pick a small comfort:",
        "options": ["Text someone who always makes you laugh", "Make yourself a warm drink and rest"],
        "mood_boost": "Cloudy days pass, and you're not alone in this one 🤗",
        "habit_nudge": "Drink a glass of water and open a window",
        "difficulty": "easy",
        "estimated_time": "5 min",
    },
}

GREETINGS: Dict[str, str] = {
    "morning": "Good morning! Let's start the day with a spark.",
    "afternoon": "Good afternoon! Time for a midday vibe check.",
    "evening": "Good evening! Let's wind down with something fun.",
    "night": "Hey night owl! One last adventure before bed?",
}

BRAIN_BITE = {
    "question": "What percentage of your body is water?",
    "answer": "About 60%! Stay hydrated! 💧",
}

KNOWN_MOODS = tuple(MOOD_CONTENT)

# unauthenticated /demo/vibe; picked at random, never persisted
DEMO_PHRASES = (
    "Small sparks start big fires. Do one kind thing today ✨",
    "Your vibe attracts your tribe 🌟",
    "Progress, not perfection. One tiny step counts 🚀",
    "Drink some water, take a breath, you've got this 💧",
    "Curiosity is a superpower. Ask one new question today 🔍",
)

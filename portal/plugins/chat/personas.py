"""
Chat personas: system prompts for live completions, welcome messages, and the
canned response pools plus keyword rules used by the mock responder.
"""
import random
from typing import Dict, List, Optional, Tuple

BOT_TYPES = ("campus", "email", "wellness", "interview", "study", "career")

SYSTEM_PROMPTS: Dict[str, str] = {
    "campus": "You are a helpful campus guide for Aivancity University. Help students navigate the campus, find classrooms, learn about facilities, and answer questions about campus services. Be friendly and concise.",
    "email": "You are a professional email writing assistant. Help students draft formal emails to professors, employers, and administrators. Provide templates, improve writing, and ensure professional tone. Keep responses structured and actionable.",
    "wellness": "You are a supportive mental health and wellness companion. Provide stress management tips, mindfulness exercises, and emotional support. ALWAYS remind users that you're not a replacement for professional mental health services. Be empathetic and encouraging.",
    "interview": "You are an interview coach helping students prepare for job interviews. Use the STAR method (Situation, Task, Action, Result) to help them structure answers. Provide feedback on common interview questions and offer practice scenarios.",
    "study": "You are a study buddy helping students with homework, explaining concepts, and suggesting effective study techniques. Use the Pomodoro Technique, active recall, and spaced repetition. Be encouraging and break down complex topics.",
    "career": "You are a career advisor helping students explore career paths, find internships, build resumes, and develop professionally. Provide actionable advice on networking, job searching, and skill development.",
}

WELCOME_MESSAGES: Dict[str, str] = {
    "campus": "Hi! I'm your Campus Assistant. I can help you navigate the campus, find classrooms, and answer questions about campus facilities. What would you like to know?",
    "email": "Hello! I'm your Email Assistant. I can help you draft professional emails, improve your writing, and manage correspondence. Would you like help writing an email, or do you have a draft you'd like me to review?",
    "wellness": "Welcome! I'm here to support your mental health and wellbeing. Remember, I'm an AI assistant and not a replacement for professional help. I can offer stress management tips, mindfulness exercises, and general wellness advice. How are you feeling today?",
    "interview": "Hi! I'm your Interview Instructor. I can help you prepare for job interviews, practice common questions, and provide feedback on your responses. Would you like to practice a specific type of interview, or shall we start with common questions?",
    "study": "Hey there! I'm your Study Buddy. I can help you with homework, explain difficult concepts, suggest study techniques, and keep you motivated. What subject or topic would you like help with today?",
    "career": "Hello! I'm your Career Advisor. I can help you explore career paths, find internships, build your resume, and plan your professional development. What aspect of your career would you like to discuss?",
}

DEFAULT_WELCOME = "Hello! How can I help you today?"

RESPONSE_POOLS: Dict[str, List[str]] = {
    "campus": [
        "The library is located in the main building, open from 8 AM to 10 PM daily. You can access it from the east entrance.",
        "Building A houses the Computer Science department on floors 2-4. The AI lab is on the 3rd floor, room 301.",
        "The cafeteria serves lunch from 11:30 AM to 2:30 PM. They have vegetarian and vegan options available daily.",
        "The gym is open to all students with a valid ID. Hours are 6 AM to 10 PM on weekdays, 8 AM to 8 PM on weekends.",
        "You can find study rooms on the 2nd floor of the library. Book them online through the student portal.",
    ],
    "email": [
        "Here's a professional email template:\n\nDear Professor [Name],\n\nI hope this email finds you well. I am writing to [state your purpose clearly].\n\n[Main content - be concise and specific]\n\nThank you for your time and consideration.\n\nBest regards,\n[Your name]\n[Student ID]",
        "When emailing professors, always use a clear subject line, formal greeting, and professional tone. Keep it concise and proofread before sending.",
        "For internship applications, highlight your relevant skills and coursework. Attach your resume and mention specific projects that align with the position.",
    ],
    "wellness": [
        "It's great that you're taking care of your mental health! Try the 4-7-8 breathing technique: breathe in for 4 seconds, hold for 7, exhale for 8. Repeat 3-4 times.",
        "Remember to take regular breaks while studying. The Pomodoro Technique (25 min work, 5 min break) can help maintain focus and reduce stress.",
        "Physical activity is great for mental health. Even a 10-minute walk can boost your mood and energy levels.",
        "If you're feeling overwhelmed, please reach out to the campus counseling center. They offer free, confidential support. Remember, I'm an AI and not a replacement for professional help.",
    ],
    "interview": [
        "Great question! Use the STAR method: Situation (context), Task (your responsibility), Action (what you did), Result (outcome). This structure helps you give complete, compelling answers.",
        "For 'Tell me about yourself,' focus on your academic background, relevant projects, skills, and career goals. Keep it to 2-3 minutes and tailor it to the role.",
        "When asked about weaknesses, choose a real weakness but show how you're working to improve it. For example: 'I used to struggle with public speaking, so I joined Toastmasters and now regularly present in class.'",
    ],
    "study": [
        "Active recall is one of the most effective study techniques. Instead of re-reading notes, try to recall information from memory, then check your accuracy.",
        "Spaced repetition helps with long-term retention. Review material after 1 day, then 3 days, then 1 week, then 2 weeks.",
        "When studying algorithms, don't just memorize - understand the 'why' behind each step. Try explaining the algorithm to someone else or write it out in pseudocode.",
        "For math and coding problems, practice is key. Do problems without looking at solutions first. Struggle is part of learning!",
    ],
    "career": [
        "Start building your professional network now! Attend career fairs, join LinkedIn, and connect with alumni in your field of interest.",
        "For tech internships, focus on building a strong GitHub portfolio. Contribute to open source, create personal projects, and document your code well.",
        "Your resume should highlight projects, not just coursework. Include specific technologies used, problems solved, and measurable results.",
        "Research the company before interviews. Understand their products, culture, and recent news. Prepare thoughtful questions to ask the interviewer.",
    ],
}

# Checked in order against the lower-cased message; first match wins.
# (keywords, pool, index). A pool of None means the active persona's pool.
# The wellness/email/interview/study rules answer from another persona's pool
# whatever persona the session uses.
# TODO: confirm with product whether cross-persona answers are wanted before changing them.
KEYWORD_RULES: List[Tuple[Tuple[str, ...], Optional[str], int]] = [
    (("library", "book"), None, 0),
    (("building", "room", "where"), None, 1),
    (("stress", "anxious", "overwhelmed"), "wellness", 3),
    (("email", "write", "professor"), "email", 0),
    (("interview", "star"), "interview", 0),
    (("study", "learn", "exam"), "study", 0),
]


def is_valid_bot_type(bot_type: str) -> bool:
    return bot_type in BOT_TYPES


def welcome_message(bot_type: str) -> str:
    return WELCOME_MESSAGES.get(bot_type, DEFAULT_WELCOME)


def pick_canned_response(bot_type: str, message: str, rng: Optional[random.Random] = None) -> str:
    """Keyword-matched canned reply; random pick from the persona pool when nothing matches."""
    pool = RESPONSE_POOLS.get(bot_type) or RESPONSE_POOLS["campus"]
    lowered = message.lower()
    for keywords, pool_name, index in KEYWORD_RULES:
        if any(word in lowered for word in keywords):
            return (RESPONSE_POOLS[pool_name] if pool_name else pool)[index]
    return (rng or random).choice(pool)

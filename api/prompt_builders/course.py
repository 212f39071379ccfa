"""Course and quiz generation prompts."""

from __future__ import annotations

from api.prompt_builders.template import build_from_template

MIN_CHAPTERS = 5
MIN_LESSONS_PER_CHAPTER = 3

TEMPLATE_COURSE = """You are an expert instructional designer. A learner wants a course on the topic "{topic}" at the "{level}" level.
Generate a comprehensive, structured course plan tailored to that difficulty. Every lesson has a quiz.
The output MUST be a single valid JSON object and nothing else, with this structure:
{{
  "title": "Course Title",
  "description": "A short, engaging description of the course.",
  "level": "{level}",
  "imageUrl": "A royalty-free image URL relevant to the topic (Unsplash, searched by course title)",
  "projectDescription": "Optional capstone project idea",
  "chapters": [
    {{
      "title": "Chapter 1 Title",
      "lessons": [
        {{
          "title": "Lesson 1.1 Title",
          "content": "Lesson content in HTML with headings, paragraphs and lists.",
          "xp": 10,
          "quiz": {{
            "title": "Quiz title",
            "questions": [
              {{
                "question": "Sample question?",
                "options": ["Option A", "Option B", "Option C", "Option D"],
                "correctAnswer": "Option A"
              }}
            ]
          }}
        }}
      ]
    }}
  ]
}}

Guidelines:
- At least {min_chapters} chapters.
- Each chapter has at least {min_lessons} lessons.
- Each lesson has at least 200 words of HTML content.
- Each quiz has 3-5 multiple-choice questions; correctAnswer is copied verbatim from options.
"""

TEMPLATE_QUIZ = """Generate a new quiz for the lesson titled "{lesson_title}".

Lesson content:
{lesson_content}

Create {question_count} multiple-choice questions on the key concepts of this lesson.
They must be NEW questions, different from earlier attempts. Challenging but fair.

Return ONLY a JSON object in this format:
{{
  "questions": [
    {{
      "question": "Question text here?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": "Option A"
    }}
  ]
}}
"""


def build_course_prompt(*, topic: str, level: str) -> str:
    return build_from_template(
        TEMPLATE_COURSE,
        topic=topic.strip(),
        level=level,
        min_chapters=MIN_CHAPTERS,
        min_lessons=MIN_LESSONS_PER_CHAPTER,
    ).strip()


def build_quiz_prompt(*, lesson_title: str, lesson_content: str, question_count: int = 5) -> str:
    return build_from_template(
        TEMPLATE_QUIZ,
        lesson_title=lesson_title,
        lesson_content=lesson_content,
        question_count=question_count,
    ).strip()

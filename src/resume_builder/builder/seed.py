"""Sample document a new builder surface opens with."""

from __future__ import annotations

from resume_builder.builder.registry import SectionRegistry
from resume_builder.models.document import Document
from resume_builder.models.sections import SectionType

SEED_SECTIONS: list[tuple[str, SectionType, str, dict]] = [
    (
        "personal",
        SectionType.PERSONAL,
        "Personal Information",
        {
            "name": "John Doe",
            "email": "john.doe@email.com",
            "phone": "+1 (555) 123-4567",
            "location": "San Francisco, CA",
            "summary": "Experienced software engineer with 5+ years in full-stack development.",
        },
    ),
    (
        "experience",
        SectionType.EXPERIENCE,
        "Work Experience",
        {
            "entries": [
                {
                    "company": "Tech Corp",
                    "position": "Senior Software Engineer",
                    "duration": "2022 - Present",
                    "description": "Led development of web applications using React and Node.js.",
                }
            ]
        },
    ),
    (
        "education",
        SectionType.EDUCATION,
        "Education",
        {
            "entries": [
                {
                    "institution": "University of Technology",
                    "degree": "Bachelor of Computer Science",
                    "duration": "2018 - 2022",
                    "gpa": "3.8/4.0",
                }
            ]
        },
    ),
    (
        "skills",
        SectionType.SKILLS,
        "Skills",
        {"skills": ["JavaScript", "React", "Node.js", "Python", "SQL", "AWS"]},
    ),
    (
        "projects",
        SectionType.PROJECTS,
        "Projects",
        {
            "entries": [
                {
                    "name": "E-commerce Platform",
                    "description": "Built a full-stack e-commerce platform with React and Express.",
                    "technologies": ["React", "Node.js", "MongoDB"],
                }
            ]
        },
    ),
    (
        "certifications",
        SectionType.CERTIFICATIONS,
        "Certifications",
        {
            "entries": [
                {"name": "AWS Solutions Architect", "issuer": "Amazon Web Services", "date": "2023"}
            ]
        },
    ),
]


def seed_document(
    registry: SectionRegistry,
    owner_id: str = "local",
    title: str = "My Resume",
) -> Document:
    sections = [
        registry.new_section(section_type, section_id=section_id, title=label, content=content)
        for section_id, section_type, label, content in SEED_SECTIONS
    ]
    return Document(owner_id=owner_id, title=title, sections=tuple(sections))


def blank_document(
    registry: SectionRegistry,
    owner_id: str = "local",
    title: str = "My Resume",
) -> Document:
    """A document holding one empty personal section."""
    personal = registry.new_section(SectionType.PERSONAL, section_id="personal")
    return Document(owner_id=owner_id, title=title, sections=(personal,))

"""Static option lists shown by the public forms and the jobs page."""

from typing import List, Optional

from pydantic import BaseModel

from models import JobType, ProjectType


class JobOpening(BaseModel):
    id: str
    title: str
    type: JobType
    level: str
    location: str
    description: str
    requirements: List[str]
    benefits: List[str]


JOB_OPENINGS = [
    JobOpening(
        id="1",
        title="Frontend Developer",
        type=JobType.FRONTEND,
        level="Mid-Level",
        location="Remote",
        description=(
            "Build beautiful, responsive user interfaces using React and TypeScript. "
            "Work closely with designers to bring mockups to life."
        ),
        requirements=[
            "3+ years React experience",
            "Strong TypeScript skills",
            "CSS/Tailwind expertise",
            "Testing experience (Jest, RTL)",
        ],
        benefits=["Competitive salary", "Remote-first culture", "Health insurance", "Learning budget"],
    ),
    JobOpening(
        id="2",
        title="Backend Developer",
        type=JobType.BACKEND,
        level="Senior",
        location="Remote",
        description=(
            "Design and implement scalable backend systems using Node.js and PostgreSQL. "
            "Lead architectural decisions."
        ),
        requirements=[
            "5+ years backend experience",
            "Node.js/Python proficiency",
            "PostgreSQL/MongoDB expertise",
            "Cloud experience (AWS/GCP)",
        ],
        benefits=["Competitive salary", "Remote-first culture", "Stock options", "Flexible hours"],
    ),
    JobOpening(
        id="3",
        title="Full-Stack Developer",
        type=JobType.FULLSTACK,
        level="Mid-Level",
        location="Hybrid (SF)",
        description=(
            "End-to-end feature development from database to UI. "
            "Perfect for developers who love variety."
        ),
        requirements=[
            "4+ years full-stack experience",
            "React + Node.js proficiency",
            "Database design skills",
            "DevOps familiarity",
        ],
        benefits=["Competitive salary", "Hybrid flexibility", "Team events", "Career growth"],
    ),
    JobOpening(
        id="4",
        title="Junior Frontend Developer",
        type=JobType.FRONTEND,
        level="Junior",
        location="Remote",
        description=(
            "Great opportunity for developers starting their career. "
            "You'll be mentored by senior team members."
        ),
        requirements=[
            "1+ years React experience",
            "HTML/CSS fundamentals",
            "JavaScript proficiency",
            "Eagerness to learn",
        ],
        benefits=["Mentorship program", "Remote-first culture", "Learning resources", "Growth path"],
    ),
]

PROJECT_TYPES = [
    {"value": ProjectType.NEW_WEBSITE.value, "label": "New Website"},
    {"value": ProjectType.SHOPIFY_STORE.value, "label": "Shopify Store"},
    {"value": ProjectType.WEBSITE_REDESIGN.value, "label": "Website Redesign"},
    {"value": ProjectType.MAINTENANCE.value, "label": "Maintenance"},
]

FEATURES = [
    "User Authentication",
    "Payment Integration",
    "Admin Dashboard",
    "Blog/CMS",
    "E-commerce Features",
    "Search Functionality",
    "Email Notifications",
    "Analytics Integration",
    "Social Media Integration",
    "API Development",
    "Mobile Responsive",
    "SEO Optimization",
]

BUDGET_RANGES = [
    {"value": "1000-3000", "label": "$1,000 - $3,000"},
    {"value": "3000-5000", "label": "$3,000 - $5,000"},
    {"value": "5000-10000", "label": "$5,000 - $10,000"},
    {"value": "10000-25000", "label": "$10,000 - $25,000"},
    {"value": "25000+", "label": "$25,000+"},
]

TIMELINES = [
    {"value": "asap", "label": "ASAP (Rush)"},
    {"value": "1-2months", "label": "1-2 Months"},
    {"value": "2-3months", "label": "2-3 Months"},
    {"value": "3+months", "label": "3+ Months"},
    {"value": "flexible", "label": "Flexible"},
]

SKILLS = [
    "React", "Vue.js", "Angular", "Next.js", "TypeScript", "JavaScript",
    "Node.js", "Python", "PHP", "Ruby", "Go", "Rust",
    "PostgreSQL", "MySQL", "MongoDB", "Redis",
    "AWS", "GCP", "Azure", "Docker", "Kubernetes",
    "Shopify", "WordPress", "Webflow",
    "Figma", "UI/UX Design", "Tailwind CSS",
]

DEVELOPER_ROLES = [
    "Frontend Developer",
    "Backend Developer",
    "Full Stack Developer",
    "Mobile Developer",
    "DevOps Engineer",
    "UI/UX Designer",
    "Shopify Developer",
]

PREFERRED_PROJECT_TYPES = [
    "New Websites",
    "E-commerce",
    "Web Apps",
    "Mobile Apps",
    "Shopify Stores",
    "Maintenance",
]


def list_jobs(job_type: Optional[JobType] = None) -> List[JobOpening]:
    if job_type is None:
        return list(JOB_OPENINGS)
    return [job for job in JOB_OPENINGS if job.type == job_type]


def get_job(job_id: str) -> Optional[JobOpening]:
    for job in JOB_OPENINGS:
        if job.id == job_id:
            return job
    return None


def options():
    """Everything the intake and onboarding forms render as choices."""
    return {
        "project_types": PROJECT_TYPES,
        "features": FEATURES,
        "budget_ranges": BUDGET_RANGES,
        "timelines": TIMELINES,
        "skills": SKILLS,
        "developer_roles": DEVELOPER_ROLES,
        "preferred_project_types": PREFERRED_PROJECT_TYPES,
    }

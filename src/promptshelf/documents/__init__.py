"""
Corpus document kinds.

- Agent: agents/*.md, an AI persona with capabilities and trigger phrases
- Skill: skills/<name>/SKILL.md, reference material bonded to one agent
- Command: commands/*.md, a slash-command prompt template
- Guide: root README.md / ARCHITECTURE.md
"""

from promptshelf.documents.agent import (
    INERT_BLOCKS,
    Agent,
    AgentFrontmatter,
    load_agent,
)
from promptshelf.documents.base import (
    UNREADABLE,
    DocumentError,
    FrontmatterModel,
    MarkdownDocument,
)
from promptshelf.documents.command import Command, CommandFrontmatter, load_command
from promptshelf.documents.guide import Guide, load_guide
from promptshelf.documents.skill import Skill, SkillFrontmatter, load_skill

Document = Agent | Skill | Command | Guide

__all__ = [
    # Errors and bases
    "DocumentError",
    "UNREADABLE",
    "FrontmatterModel",
    "MarkdownDocument",
    "Document",
    # Agents
    "Agent",
    "AgentFrontmatter",
    "INERT_BLOCKS",
    "load_agent",
    # Skills
    "Skill",
    "SkillFrontmatter",
    "load_skill",
    # Commands
    "Command",
    "CommandFrontmatter",
    "load_command",
    # Guides
    "Guide",
    "load_guide",
]

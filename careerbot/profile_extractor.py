"""
Profile extraction

Turns a LinkedIn "Get a copy of your data" export (a folder of CSV files)
into the single text blob the Indexer consumes. Each section starts with a
header naming its columns, followed by one "- a,b,c" line per record:

    Positions / Roles(Company Name, Title, Description, Date):
    - Acme,Engineer,Built things,Jan 2020 - Mar 2023

Sections are separated by a blank line. A missing CSV file gives a section
with no lines rather than an error, since exports differ between accounts.
"""

import csv
from pathlib import Path
from typing import Dict, List

from careerbot.logging_utils import get_class_logger


Record = Dict[str, str]


def _section(title: str, lines: List[str]) -> str:
    return f"{title}:\n" + "\n".join(lines)


class ProfileExtractor:
    """Read the CSV export in ``data_dir`` and flatten it to text."""

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self.logger = get_class_logger(self.__class__)

    def read_csv(self, file_name: str) -> List[Record]:
        path = self.data_dir / file_name
        if not path.exists():
            self.logger.warning("Profile file not found, skipping: %s", path)
            return []

        # LinkedIn exports sometimes start with a byte order mark
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            return [
                {key: (value or "") for key, value in row.items() if key is not None}
                for row in reader
                if any((value or "").strip() for value in row.values() if isinstance(value, str))
            ]

    def get_content(self) -> str:
        """Build the corpus text from every known export file."""
        sections = []

        profile = self.read_csv("Profile.csv")
        if profile:
            p = profile[0]
            sections.append(
                f"Profile:\n{p.get('First Name', '')} {p.get('Last Name', '')}. {p.get('Summary', '')}"
            )

        sections.append(_section(
            "Certifications(Name,Authority,Date)",
            [f"- {c.get('Name', '')},{c.get('Authority', '')},{c.get('Started On', '')}"
             for c in self.read_csv("Certifications.csv")]
        ))
        sections.append(_section(
            "Company Follows(Organization,Date)",
            [f"- {c.get('Organization', '')},{c.get('Followed On', '')}"
             for c in self.read_csv("Company Follows.csv")]
        ))
        sections.append(_section(
            "Connections(Name)",
            [f"- {c.get('First Name', '')} {c.get('Last Name', '')}"
             for c in self.read_csv("Connections.csv")]
        ))
        sections.append(_section(
            "Education(Degree,Type,School,Date)",
            [f"- {c.get('Degree Name', '')},{c.get('Notes', '')},{c.get('School Name', '')},"
             f"{c.get('Start Date', '')} - {c.get('End Date', '')}"
             for c in self.read_csv("Education.csv")]
        ))
        sections.append(_section(
            "Emails",
            [f"- {c.get('Email Address', '')}" for c in self.read_csv("Email Addresses.csv")]
        ))
        sections.append(_section(
            "Languages(Name,Proficiency)",
            [f"- {c.get('Name', '')},{c.get('Proficiency', '')}"
             for c in self.read_csv("Languages.csv")]
        ))

        # Only courses that were actually completed
        completed_key = "Content Completed At (if completed)"
        sections.append(_section(
            "Courses(Title,Description,Date)",
            [f"- {c.get('Content Title', '')},{c.get('Content Description', '')},{c.get(completed_key, '')}"
             for c in self.read_csv("Learning.csv")
             if c.get(completed_key, "").strip() != "N/A"]
        ))

        sections.append(_section(
            "Patents(Title,Description,Date)",
            [f"- {c.get('Title', '')},{c.get('Description', '')},{c.get('Issued On', '')}"
             for c in self.read_csv("Patents.csv")]
        ))
        sections.append(_section(
            "Positions / Roles(Company Name, Title, Description, Date)",
            [f"- {c.get('Company Name', '')},{c.get('Title', '')},{c.get('Description', '')},"
             f"{c.get('Started On', '')} - {c.get('Finished On', '')}"
             for c in self.read_csv("Positions.csv")]
        ))
        sections.append(_section(
            "Projects(Title, Description, Date)",
            [f"- {c.get('Title', '')},{c.get('Description', '')},"
             f"{c.get('Started On', '')} - {c.get('Finished On', '')}"
             for c in self.read_csv("Projects.csv")]
        ))

        # Hidden recommendations stay private
        sections.append(_section(
            "Recommendations Received(From, Recommendation, Date)",
            [f"- {c.get('First Name', '')} {c.get('Last Name', '')},{c.get('Text', '')},{c.get('Creation Date', '')}"
             for c in self.read_csv("Recommendations_Received.csv")
             if c.get("Status", "").strip() == "VISIBLE"]
        ))
        sections.append(_section(
            "Skills",
            [f"- {c.get('Name', '')}" for c in self.read_csv("Skills.csv")]
        ))

        return "\n\n".join(sections)

"""Sample catalog used by the command line when no catalog file is given."""

from __future__ import annotations

from typing import List

from .models import FileRecord

_QUARTER_CONTENT = "{} quarter financial results for 2023."

_SAMPLES = (
    (1, "Q1 Financial Report.docx", "document", 250,
     _QUARTER_CONTENT.format("First"), ["report", "financial", "Q1"]),
    (2, "Company Logo.png", "image", 450,
     "Binary image content...", ["logo", "branding"]),
    (3, "Customer Data 2023.csv", "spreadsheet", 720,
     "Customer,Email,Purchase,Date", ["customer", "data", "2023"]),
    (4, "Annual Presentation.pptx", "presentation", 1200,
     "Annual company presentation for stakeholders", ["presentation", "company", "annual"]),
    (5, "Q2 Financial Rport.docx", "document", 275,
     _QUARTER_CONTENT.format("Second"), ["report", "financial", "Q2"]),
    (6, "User Authentication.js", "code", 15,
     "function authenticate(user, password) { /* code */ }", ["authentication", "javascript"]),
    (7, "Customer Data - Backup.csv", "spreadsheet", 890,
     "Customer,Email,Purchase,Date,Location", ["backup", "customer", "data"]),
    (8, "Q3-Finance-Report.docx", "document", 310,
     _QUARTER_CONTENT.format("Third"), ["report", "financial", "Q3"]),
    (9, "main.css", "code", 22,
     "body { font-family: Arial; color: #333; }", ["code", "css", "styles"]),
    (10, "4th Quarter Financial Summary.docx", "document", 290,
     _QUARTER_CONTENT.format("Fourth"), ["report", "financial", "Q4"]),
    (11, "UserData_2023.csv", "spreadsheet", 720,
     "User,Email,LastLogin", ["users", "data", "2023"]),
    (12, "ExpenseReport_March.xlsx", "spreadsheet", 340,
     "Department,Category,Amount,Date", ["expenses", "report", "march"]),
    (13, "Marketing Strategy 2023.pptx", "presentation", 890,
     "Marketing strategy presentation for 2023", ["marketing", "strategy", "presentation"]),
    (14, "Product Roadmap.docx", "document", 450,
     "Product development roadmap for next 12 months", ["product", "roadmap", "development"]),
    (15, "HR Policy Manual.pdf", "document", 1200,
     "Company HR policies and procedures", ["HR", "policy", "manual"]),
)  # fmt: skip


def sample_records() -> List[FileRecord]:
    """Return fresh copies of the fifteen sample records."""

    return [
        FileRecord(id=id_, name=name, type=type_, size=size, content=content, tags=list(tags))
        for id_, name, type_, size, content, tags in _SAMPLES
    ]


__all__ = ["sample_records"]

from app.parsing.base import BaseResumeParser
from app.parsing.factory import ParserFactory
from app.parsing.models import ParsedResume
from app.parsing.parser import ResumeParser

__all__ = ["BaseResumeParser", "ParsedResume", "ParserFactory", "ResumeParser"]

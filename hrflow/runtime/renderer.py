"""Letter renderer.

Letters are plain ``${name}`` templates. A template is only rendered when
every placeholder has a value; a partial letter is never produced.
"""

from __future__ import annotations

from string import Template
from typing import Mapping


class MissingLetterVariables(ValueError):
    def __init__(self, language: str, names: list[str]):
        self.language = language
        self.names = names
        super().__init__(f"Missing letter variables for '{language}': {', '.join(names)}")


def placeholders(template: str) -> list[str]:
    """Placeholder names of ``template`` in order of first use."""
    names: list[str] = []
    for match in Template.pattern.finditer(template):
        name = match.group('named') or match.group('braced')
        if name and name not in names:
            names.append(name)
    return names


class LetterRenderer:
    def render(self, template: str, variables: Mapping[str, str], *, language: str) -> str:
        """Render a letter template.

        Args:
            template: Letter template containing ${var} placeholders.
            variables: Mapping of variable names to values.
            language: Language code of the template, reported on failure.

        Raises:
            MissingLetterVariables: Listing every placeholder without a value.
        """
        missing = [name for name in placeholders(template) if name not in variables]
        if missing:
            raise MissingLetterVariables(language, missing)
        return Template(template).substitute(variables)

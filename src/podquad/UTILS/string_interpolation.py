"""
Utilities for expanding ${VAR} references in service config files.
"""
import re
from typing import Dict

from ..errors import InvalidInput

# ${VAR} or ${VAR:-default}
VARIABLE_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}')

class EnvironmentInterpolator:
    """
    Expands ${VAR} and ${VAR:-default} so secrets can stay out of config files.
    """
    @staticmethod
    def interpolate(template: str, context: Dict[str, str]) -> str:
        """
        Interpolates variables in the template string using the provided context.

        :param template: The string containing ${VAR} placeholders.
        :param context: The variables available for expansion.
        :return: The interpolated string.
        :raises InvalidInput: If a variable is unset and has no default.
        """
        def replace(match):
            var_name, default = match.group(1), match.group(2)
            value = context.get(var_name)
            if value:
                return value
            if default is not None:
                return default
            if value is not None:
                return value
            raise InvalidInput(f"Variable {var_name} is not set")

        return VARIABLE_PATTERN.sub(replace, template)

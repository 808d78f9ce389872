"""YAML template rendering for configuration models."""

from config_watcher.template.yaml_template import TemplateLine, generate_yaml_template

__all__ = ["TemplateLine", "generate_yaml_template"]

from result_templates.layout import (CANVAS_HEIGHT, CANVAS_WIDTH, CanvasSize, TemplateDefinition,
                                     TemplateElement, check_content, generate_element_id)
from result_templates.defaults import DEFAULT_TEMPLATES, get_template_for_level
from result_templates.fields import get_fields_by_category, grouped_fields
from result_templates.binding import ReportData, bind_template, build_field_values, sample_report

"""
updater.py - Set single-select field values on a project item

Each planned field is resolved against the live project schema and
updated in plan order. The first failure stops the run; updates that
already went through stay applied.
"""

import logging

from .errors import ConfigError

logger = logging.getLogger(__name__)

UPDATE_FIELD_MUTATION = """
mutation updateState($projectId: ID!, $itemId: ID!, $fieldId: ID!, $optionId: String!) {
  updateProjectV2ItemFieldValue(
    input: {
      projectId: $projectId
      itemId: $itemId
      fieldId: $fieldId
      value: {
        singleSelectOptionId: $optionId
      }
    }
  ) {
    projectV2Item {
      id
    }
  }
}
"""


def resolve_field_ids(assignment, project, label):
    """
    Look up the field and option ids for one planned value
    Returns (field_id, option_id); a CSV entry the project does not know is a ConfigError
    """
    field = project.field(assignment.field)
    if field is None:
        raise ConfigError(
            f"Field {assignment.field} not found in project number {project.number}. Typo in your CSV?"
        )
    if not field.is_single_select:
        raise ConfigError(
            f"Field {assignment.field} in project number {project.number} is not a single select field "
            f"({field.data_type})"
        )

    option_id = field.option_id(assignment.option)
    if option_id is None:
        available = ", ".join(name for _, name in field.options)
        raise ConfigError(
            f'Invalid field or option selected for label "{label}" -> {assignment.field}:{assignment.option} '
            f"(available options: {available})"
        )
    return field.id, option_id


def update_field_value(client, project_id, item_id, field_id, option_id):
    """Set one single-select value; returns the updated item id"""
    data = client.execute(UPDATE_FIELD_MUTATION, {
        "projectId": project_id,
        "itemId": item_id,
        "fieldId": field_id,
        "optionId": option_id,
    })
    return data["updateProjectV2ItemFieldValue"]["projectV2Item"]["id"]


def apply_plan(client, project, item, plan, label, on_applied=None):
    """
    Apply every planned field value to the issue's project item
    Returns the list of assignments that were applied
    """
    logger.info(f"Processing label {label}")
    applied = []
    for assignment in plan:
        logger.info(f"Setting field: {assignment.field} to {assignment.option}")
        field_id, option_id = resolve_field_ids(assignment, project, label)

        logger.debug(f"Updating project (id: {project.id})'s item (id: {item.id}).")
        logger.debug(
            f"\tsetting field: {assignment.field} (id: {field_id}) "
            f"to option: {assignment.option} (id: {option_id})"
        )
        update_field_value(client, project.id, item.id, field_id, option_id)

        applied.append(assignment)
        if on_applied:
            on_applied(assignment)
    return applied

"""Exceptions raised by the target catalog and reconciliation engine."""


class TargetError(Exception):
    """Base class for target lookup / reconciliation failures."""


class TemplateNotFound(TargetError):
    def __init__(self, template_id):
        self.template_id = template_id
        super().__init__(f"Target template with ID {template_id} not found")


class AssignmentNotFound(TargetError):
    def __init__(self, assignment_id):
        self.assignment_id = assignment_id
        super().__init__(f"Target assignment with ID {assignment_id} not found")

class TodoError(Exception):
    """Base class for todo service errors"""

    status_code = 500


class ValidationError(TodoError):
    """Missing or empty required field, bad enum value or unparsable date"""

    status_code = 400


class InvalidIdentifier(TodoError):
    status_code = 400

    def __init__(self, todo_id):
        super().__init__("Invalid todo ID")
        self.todo_id = todo_id


class NotFound(TodoError):
    status_code = 404

    def __init__(self, todo_id):
        super().__init__("Todo not found")
        self.todo_id = todo_id


class StoreError(TodoError):
    """Any failure of the underlying document store"""

    status_code = 500

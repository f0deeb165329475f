class ValidationException(ValueError):
    pass


class NotModifiedException(Exception):
    def __init__(self, message: str = None, user_id: str = None):
        super(NotModifiedException, self).__init__(message)
        self.user_id = user_id


class UserDoesNotExistException(NotModifiedException):
    pass


class PostDoesNotExistException(NotModifiedException):
    def __init__(self, message: str = None, user_id: str = None, post_id: str = None):
        super(PostDoesNotExistException, self).__init__(message, user_id)
        self.post_id = post_id

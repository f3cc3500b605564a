# Importing the models registers their tables on Base.metadata
from classhub.models.user import User  # noqa
from classhub.models.classroom import Classroom, ClassroomMember  # noqa
from classhub.models.message import Message  # noqa
from classhub.models.upload import Upload  # noqa

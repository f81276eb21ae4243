from flask import jsonify

from library_rental.errors import LibraryError


def json_error(error: LibraryError):
    return jsonify(error.to_dict()), error.status_code

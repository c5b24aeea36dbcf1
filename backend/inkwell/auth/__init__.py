"""
Session provider: signed bearer tokens identifying a User.id.

The token only proves *who* is calling; whether that identity may touch a
record is decided by `inkwell.services.authorization`.
"""

"""
Client-side session layer for Ball Knowledge.

Includes:
- Bearer credential decoding and expiry checks (`token_codec`)
- Durable key/value storage for the raw credential (`storage`)
- The single owned session state with change notification (`session_store`)
- Error types shared by the whole client (`errors`)
"""

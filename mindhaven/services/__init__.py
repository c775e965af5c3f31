"""MindHaven services.

Request flow for user-generated text:
- Safety Service screens forum text and classifies risk before anything is stored
- Crisis Engine runs for every crisis-level chat message, post or reply
- All services log hash_user_id() values, never raw user ids
- Gateway is the only HTTP surface; services are plain Python objects
"""

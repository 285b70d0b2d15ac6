"""HTTP command shell exposing the chat store to the desktop front end."""

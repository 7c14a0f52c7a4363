"""Read media history from Goodreads feeds and MediaTracker servers, and queue imports."""
from fitsocial.routes import (
    auth,
    comments,
    friends,
    notifications,
    posts,
    public,
    search,
    sessions,
    uploads,
    users,
    workouts,
)

routers = [
    auth.router,
    users.router,
    posts.router,
    workouts.router,
    sessions.router,
    comments.router,
    friends.router,
    notifications.router,
    public.router,
    search.router,
    uploads.router,
]

# Reason phrases for the statuses the server answers with
HTTP_STATUS: dict[int, str] = {
	200: "OK",
	400: "Bad Request",
	404: "Not Found",
	405: "Method Not Allowed",
	500: "Internal Server Error",
}

# EOF

# EOF
